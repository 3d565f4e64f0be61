import sys

from faqrag.cli import main

sys.exit(main())
