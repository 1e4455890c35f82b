"""Update workflows."""
