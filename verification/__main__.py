import sys

from .verify_docs_examples import main

if __name__ == "__main__":
    sys.exit(main())
