from mac_screen_time.menubar import main

main()
