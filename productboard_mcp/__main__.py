from .server.server import main

main()
