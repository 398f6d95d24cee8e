from iconcraft.main import main

main()
