from lox.main import main

main()
