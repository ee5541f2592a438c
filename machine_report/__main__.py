from machine_report.cli import main

raise SystemExit(main())
