"""Token lifecycle engine: validity tracking, login supervision and state broadcasting."""
