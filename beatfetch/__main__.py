from beatfetch.cli import main

main()
