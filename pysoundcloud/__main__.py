from pysoundcloud.cli import main

main()
