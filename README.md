# esimcli

A command-line front end for managing eSIM profiles on an eUICC card. It
dispatches `chip`, `profile`, `notification` and `driver` sub-commands,
reaches the card through a pluggable APDU driver and the network through a
pluggable HTTP driver, and prints every result as one line of JSON on
standard output so that other programs can drive it.

It has no dependencies outside the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## What it does not do

The package does not itself speak the card-side and server-side RSP
protocols (reading the EID and EUICCInfo2, profile operations, the download
exchanges with an SM-DP+, notification handling). Those are carried out by a
*card object* that you supply through a card factory (see
[Using it from Python](#using-it-from-python)). When `esimcli` is started
from the shell there is no such factory, so every `chip`, `profile` and
`notification` command stops with:

```
{"type":"lpa","payload":{"code":-1,"message":"euicc_init","data":""}}
```

SM-DS discovery (`profile discovery`) is not available and always reports
`"message":"profile_discovery","data":"not supported"`. There is no PC/SC
smart-card reader driver.

## Usage

```
esimcli <driver|chip|profile|notification> ...
```

With no sub-command, or an unknown one, a usage line listing the choices is
printed and the exit status is non-zero.

### Chip

```
esimcli chip info                    # EID, configured addresses, EUICCInfo2
esimcli chip defaultsmdp <smdp>      # set the default SM-DP+ address
esimcli chip purge yes               # erase the eUICC; any other word cancels
```

### Profiles

```
esimcli profile list
esimcli profile enable <iccid/aid> [refreshflag]
esimcli profile disable <iccid/aid> [refreshflag]
esimcli profile nickname <iccid> [new_name]      # no name clears it
esimcli profile delete <iccid/aid>
esimcli profile download [-s <SM-DP+>] [-m <matching id>] [-i <IMEI>] [-c <confirmation code>]
esimcli profile download -h
```

When `-s` is left out, `download` uses the default SM-DP+ address stored on
the card, and fails with `"message":"smdp is null"` if there is none.

### Notifications

```
esimcli notification list
esimcli notification process <seqNumber>
esimcli notification remove <seqNumber>
```

### Drivers

```
esimcli driver apdu
esimcli driver http
```

These check that the drivers are present; `driver http` fails if no HTTP
driver could be loaded.

## Drivers

The drivers are chosen with environment variables. A value may be a bare
name (`stdio`) or a library-style file name such as
`libapduinterface_stdio.so`, which is reduced to the same name.

`APDU_INTERFACE` (default `at`):

- `at` — `AtApduInterface`: APDUs over a modem's `AT+CCHO`, `AT+CGLA` and
  `AT+CCHC` commands. The device is opened when the card connects, from
  `AT_DEVICE` (default `/dev/ttyUSB0`); setting `AT_DEBUG` echoes each line
  read from the device.
- `stdio` — `StdioApduInterface`: each request is written to standard output
  as `{"type":"apdu","payload":{"func":...,"param":...}}` (param in hex, or
  `null`) and the answer is read from standard input as
  `{"type":"apdu","payload":{"ecode":0,"data":"..."}}`.

An unknown APDU driver is an error and the program exits.

`HTTP_INTERFACE` (default `curl`):

- `curl` or `urllib` — `UrllibHttpInterface`: posts with the standard
  library's `urllib`. Server certificates are not verified.
- `stdio` — `StdioHttpInterface`: requests go out as
  `{"type":"http","payload":{"url":...,"tx":"...","headers":[...]}}` and
  answers come back as `{"type":"http","payload":{"rcode":200,"rx":"..."}}`.

An unknown HTTP driver is reported on standard error and the program carries
on without one.

## Output

Each command ends with a line such as

```
{"type":"lpa","payload":{"code":0,"message":"success","data":null}}
```

or, on failure,

```
{"type":"lpa","payload":{"code":-1,"message":"es10c_enable_profile","data":"iccid or aid not found"}}
```

Multi-step commands (`profile download`, `notification process`) also print
`{"type":"progress","payload":{"code":0,"message":...,"data":null}}` as each
step starts. These messages are built by `esimcli.jprint`
(`success_message`, `error_message`, `progress_message`, and the matching
`print_*` functions).

## Using it from Python

`esimcli.cli.main(argv=None, card_factory=None)` runs the command line and
returns its exit status. `card_factory` is called once, on first use, with
the loaded APDU and HTTP interfaces, and returns the card object. The methods
the card object must provide are listed in the docstrings of
`esimcli.chip`, `esimcli.profile` and `esimcli.notification`; operations
return 0 (or nothing) on success, a result code on failure, or raise. If the
card object has a `close()` method it is called when the command finishes.

```python
from esimcli.cli import main

status = main(["esimcli", "profile", "list"], card_factory=make_card)
```

The building blocks are also usable on their own: `Applet`, `Session`,
`run_applet` and `usage` in `esimcli.applet`; `load_drivers` and
`make_driver_applet` in `esimcli.interfaces`; the `ApduInterface` and
`HttpInterface` base classes, `HttpResponse`, `InterfaceError`,
`bytes_to_hex` and `hex_to_bytes` in `esimcli.transport`.