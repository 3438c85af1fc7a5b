from roomsync.main import main

raise SystemExit(main())
