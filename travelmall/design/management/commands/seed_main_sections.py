"""
Management command to create the default storefront home page sections
"""
from django.core.management.base import BaseCommand

from travelmall.design.models import MainPageSection
from travelmall.design.services import get_sections, reset_sections


class Command(BaseCommand):
    help = "Creates the default main page sections (header, hero, search, banner, ... footer)"

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Replace existing sections with the defaults',
        )

    def handle(self, *args, **options):
        if options['reset']:
            self.stdout.write(self.style.WARNING("Resetting main page sections..."))
            sections = reset_sections()
        else:
            existing = MainPageSection.objects.count()
            sections = get_sections()
            if existing:
                self.stdout.write(self.style.WARNING(f"Sections already exist ({existing}); use --reset to restore defaults"))

        for section in sections:
            marker = 'fixed' if section.is_fixed else ('visible' if section.is_visible else 'hidden')
            self.stdout.write(f"  {section.order}. {section.key} ({section.type}, {marker})")
        self.stdout.write(self.style.SUCCESS(f"Main page sections: {len(sections)}"))
