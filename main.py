from rich.pretty import pprint

from argtree import *

program = Program("tool", version="1.4.0", description="Build and test a small project.", colorful=True)
program.add_option("verbose", "-v | --verbose", help="Print every step.")


@program.command(help="Compile the given sources.")
def build(options, operands):
    """
    Compile sources into the output directory.
    """
    pprint(operands)


build.add_option("jobs", "-j | --jobs", True, type=int, default=1, help="Number of parallel jobs.")
build.add_option("output", "-o | --output", True, default="build", help="Output directory.")
build.add_operand("sources", "*", help="Files to compile.")


if __name__ == '__main__':
    pprint(program.parse())
