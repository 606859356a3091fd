# SPDX-License-Identifier: CC0-1.0
from faqbot.cli import run_bot


if __name__ == "__main__":
    run_bot()
