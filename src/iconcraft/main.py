import sys
from pathlib import Path

# Ensure 'src' is in sys.path to prioritize local source over installed package
if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def main():
    """
    Entry point for IconCraft.
    With no arguments, runs the build task (the usual operator workflow).
    """
    from iconcraft.cli.commands import cli

    if len(sys.argv) == 1:
        sys.argv.append('build')
    cli()


if __name__ == "__main__":
    main()
