"""Package entry point for ``python -m yt_audio_relay``.

HOW: Delegates to the CLI's main() and exits with its status code.
"""

import sys

from yt_audio_relay.cli import main

if __name__ == "__main__":
    sys.exit(main())
