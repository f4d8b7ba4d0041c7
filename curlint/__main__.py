from curlint.cli.lint import main

main()
