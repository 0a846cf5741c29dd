from bsc_mcp.stdio import main

raise SystemExit(main())
