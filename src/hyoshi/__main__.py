from hyoshi.cli import main

main()
