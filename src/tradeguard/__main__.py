# src/tradeguard/__main__.py
from tradeguard.app import main

main()
