import sys

from torrent_inspector.cli import main

sys.exit(main())
