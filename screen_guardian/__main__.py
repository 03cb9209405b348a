from .app import ScreenGuardianApp


def main() -> None:
    ScreenGuardianApp().run()


if __name__ == "__main__":
    main()
