import sys

from http_webhook.cli import main

sys.exit(main())
