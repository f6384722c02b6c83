from django.core.management import BaseCommand
from django.core.management import CommandError
from lxml import etree

from importer.spl import import_spl


class Command(BaseCommand):
    help = "Import one or more SPL XML files"

    def add_arguments(self, parser):
        parser.add_argument(
            "spl_files",
            help="The SPL files to be parsed.",
            nargs="+",
            type=str,
        )
        parser.add_argument(
            "--bulk",
            dest="use_bulk_operations",
            action="store_true",
            default=None,
            help="Use bulk operations for section hierarchies and characteristics.",
        )
        parser.add_argument(
            "--no-bulk",
            dest="use_bulk_operations",
            action="store_false",
            help="Save sections and characteristics one at a time.",
        )

    def handle(self, *args, **options):
        failed = 0
        for spl_file in options["spl_files"]:
            try:
                with open(spl_file, "rb") as source:
                    result = import_spl(
                        source,
                        use_bulk_operations=options["use_bulk_operations"],
                    )
            except (OSError, etree.XMLSyntaxError) as e:
                raise CommandError(f"Unable to read {spl_file}: {e}") from e

            if result.success:
                self.stdout.write(
                    self.style.SUCCESS(f"{spl_file}: {result.summary()}"),
                )
            else:
                failed += 1
                self.stdout.write(self.style.WARNING(f"{spl_file}: {result.summary()}"))
                for error in result.errors:
                    self.stdout.write(self.style.ERROR(f"  {error}"))

        if failed:
            raise CommandError(f"{failed} file(s) imported with errors")
