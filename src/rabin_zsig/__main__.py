"""``python -m rabin_zsig`` runs the reference keygen / sign / benchmark scenario."""
from rabin_zsig.cli import cli


def main():
    cli(prog_name="rabin-zsig")


if __name__ == "__main__":
    main()
