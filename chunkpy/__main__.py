from chunkpy.cli import main

main()
