"""
Saya Discord Bot
A Discord bot that lets moderators review and approve member verification requests.

Entry point for the application.
"""

from sayabot.config import init_config
from sayabot.bot import get_bot, run_bot
from sayabot.commands import setup_slash_commands, setup_interaction_listener, setup_message_listener
from sayabot.utils.startup_checks import run_startup_checks

# Initialize configuration (load .env, read config.yaml)
init_config()

# Run startup checks to validate configuration
# This will exit with an error if critical checks fail (Discord token, server configs)
run_startup_checks(exit_on_critical=True)

# Get bot instance and set up commands
bot = get_bot()
setup_slash_commands(bot)
setup_interaction_listener(bot)
setup_message_listener(bot)

if __name__ == "__main__":
    run_bot()
