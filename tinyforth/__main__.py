from tinyforth.repl import cli_main

cli_main()
