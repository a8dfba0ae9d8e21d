"""HomeTouch deploy — put the hometoucher client on a Raspberry Pi.

Two stages:
  - Local: render the device's systemd unit from a template and copy the
    binary, unit, network config and remote stage script to the Pi
  - Remote: run the stage script over SSH (install unit, enable networkd,
    drop getty, reboot)

Quickstart::

    $ install-on-pi 10.0.99.21 kiosk1
"""

__version__ = "0.1.0"
