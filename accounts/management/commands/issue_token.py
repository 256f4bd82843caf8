# accounts/management/commands/issue_token.py

# Import BaseCommand and CommandError because custom management commands are based on them.
from django.core.management.base import BaseCommand, CommandError
# Import User from accounts.models because we look the account up by username.
from accounts.models import User
# Import issue_token from accounts.auth because it signs the credential.
from accounts.auth import issue_token

"""
This command prints a fresh chat credential for an existing user
(run it with 'python manage.py issue_token <username>'). Sign-up
and login flows live outside this project, so this is how a
developer gets a token to open a WebSocket or call the API.
"""
class Command(BaseCommand):
    help = 'Prints a signed chat token for the given username.'

    def add_arguments(self, parser):
        parser.add_argument('username')

    def handle(self, *args, **options):
        try:
            user = User.objects.get(username=options['username'])
        except User.DoesNotExist:
            raise CommandError(f"User '{options['username']}' does not exist.")
        self.stdout.write(issue_token(user))
