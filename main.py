import argparse
import logging
import sys

from dotenv import load_dotenv

from kvauth.exceptions import KeyVaultSampleError
from kvauth.utils.config_loader import load_settings_file
from kvauth.utils.settings import AzureSettings, SampleOptions
from kvauth.workflows.auth_sample_workflow import KeyVaultAuthSample


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Azure Key Vault Authentication Sample")
    parser.add_argument("--config", help="YAML settings file (default: environment variables)")
    parser.add_argument("--auth-mode", choices=["callback", "ambient"], help="How to authenticate to Key Vault")
    parser.add_argument("--vault-name", help="Vault name to create (default: random)")
    parser.add_argument("--list-secrets", action="store_true", help="List enabled, unmanaged secrets afterwards")
    parser.add_argument("--pause", action="store_true", help="Wait for Enter before exiting")
    parser.add_argument("--verbose", action="store_true", help="Show Azure SDK logging")
    return parser.parse_args(argv)


def load_configuration(args: argparse.Namespace) -> tuple[AzureSettings, SampleOptions]:
    if args.config:
        settings, options = load_settings_file(args.config)
    else:
        settings, options = AzureSettings(), SampleOptions()

    overrides = {}
    if args.auth_mode:
        overrides["auth_mode"] = args.auth_mode
    if args.vault_name:
        overrides["vault_name"] = args.vault_name
    if args.list_secrets:
        overrides["list_secrets"] = True
    if overrides:
        options = options.model_copy(update=overrides)

    return settings, options


def main(argv=None) -> int:
    """Main entry point for the Key Vault authentication sample."""
    args = parse_args(argv)

    # Setup logging
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")
    if not args.verbose:
        logging.getLogger("azure").setLevel(logging.WARNING)
        logging.getLogger("msal").setLevel(logging.WARNING)
    logger = logging.getLogger(__name__)

    # Load environment variables from .env file
    load_dotenv()

    logger.info("Azure Key Vault Authentication Sample")

    exit_code = 0
    try:
        settings, options = load_configuration(args)
        result = KeyVaultAuthSample(settings, options).run()
        logger.info(f"Done. Vault {result.vault.name} is in resource group {result.resource_group.name}.")
    except KeyVaultSampleError as e:
        logger.error(f"Sample failed: {type(e).__name__}: {e}")
        exit_code = 1

    if args.pause:
        input("Press Enter to continue.")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
