from django.core.management.base import BaseCommand

from comet.badges import DEFAULT_BADGES
from comet.models import Badge


class Command(BaseCommand):
    help = "Install the default badge catalogue (existing badges are updated in place)"

    def handle(self, *args, **options):
        created = 0
        for name, description, icon, criteria_type, criteria_value in DEFAULT_BADGES:
            _, was_created = Badge.objects.update_or_create(
                name=name,
                defaults={
                    "description": description,
                    "icon": icon,
                    "criteria_type": criteria_type,
                    "criteria_value": criteria_value,
                },
            )
            created += was_created
        self.stdout.write(self.style.SUCCESS(
            f"{created} badges created, {len(DEFAULT_BADGES) - created} updated"
        ))
