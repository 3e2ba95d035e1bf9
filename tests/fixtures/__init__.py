"""Sample response documents shared by the test suite."""
