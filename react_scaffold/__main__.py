from .scaffolder import main

main()
