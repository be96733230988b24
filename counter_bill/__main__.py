from counter_bill.main import main

main()
