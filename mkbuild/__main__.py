"""支持 python -m mkbuild"""

from mkbuild.cli import main

if __name__ == "__main__":
    main()
