# automation/__init__.py
"""
Browser automation flows.

  automation.lotto      building blocks for the dhlottery.co.kr purchase flow
  automation.lotto_bot  the unattended weekly run (python -m automation.lotto_bot)
"""
