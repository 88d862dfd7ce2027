from textquery.cli import main

main()
