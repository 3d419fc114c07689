"""Allow ``python -m azvmnet``."""

from azvmnet.cli import main

main()
