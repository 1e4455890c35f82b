from osrs_icons.cli import main

# python -m osrs_icons update-icons [--no-cache]
if __name__ == "__main__":
    main()
