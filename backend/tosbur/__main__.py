from tosbur.cli import main

main()
