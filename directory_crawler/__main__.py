import sys

from directory_crawler.main import main


sys.exit(main())
