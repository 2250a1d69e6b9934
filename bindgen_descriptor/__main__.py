from bindgen_descriptor.compiler.cli import main

raise SystemExit(main())
