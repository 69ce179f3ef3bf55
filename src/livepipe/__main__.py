from livepipe.cli import main

main()
