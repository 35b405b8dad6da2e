from mgo_events.cli import main

main()
