"""Allow running mmpp as: python -m mmpp"""

from mmpp.cli import main

main()
