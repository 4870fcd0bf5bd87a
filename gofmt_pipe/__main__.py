from gofmt_pipe.cli import main

main()
