from walletgate.main import main

main()
