from fruitstand.server import main

main()
