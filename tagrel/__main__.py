from tagrel.cli.app import main

main()
