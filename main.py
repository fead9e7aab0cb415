# main.py - launches the interactive chatbot
# usage: python main.py [brain_file] [--config config.json] [--seed N] [--timing]

import sys

from learning_chatbot.cli.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
