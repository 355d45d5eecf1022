""" main.py: command line launcher for the Cloudways cache client.

Lets the tool run straight from a checkout (`python main.py varnish 123456 flush_all`) without
installing the `cloudways-cache` console script. All argument handling lives in
`provider_api.cli`.
"""

import sys

from provider_api.cli import main

if __name__ == '__main__':
    sys.exit(main())
