"""Document catalogue site: catalogue build script, catalogue API and trivia quiz."""
