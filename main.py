from rich.pretty import pprint

from declopt import *


@options
class Settings:
    filename: str = Option("--filename", help="file the results are written to")
    iterations: int = Option("--iterations", "-i", default=1, help="number of passes")
    help: bool = Option("--help", "-h", default=False, help="print this usage and exit")


if __name__ == '__main__':
    settings = parse(Settings, shell=True, fancy=True)
    if settings.help:
        print_usage(Settings, fancy=True)
    else:
        pprint(vars(settings))
