#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Generate team schedule cards from a team sheet CSV.
"""

# local repo modules
import team_card_generator.cli


if __name__ == "__main__":
	team_card_generator.cli.main()
