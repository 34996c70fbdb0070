"""Keep a directory of editor plugin repositories in sync with a declaration file."""
