from progless.cli import main

main()
