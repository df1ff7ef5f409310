from nchat_tooling.cli.main import main

main()
