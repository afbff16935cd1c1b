from marta_tracker.main import main

raise SystemExit(main())
