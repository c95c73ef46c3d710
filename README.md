# a2emu

Pieces of an Apple II emulator, written as plain Python objects that can be
used and tested one at a time. Memory handlers throughout are objects with
`peek(address)` and `poke(address, value)`.

## What is inside

- `a2emu.pins`: conversion between a byte and its eight data pins
  (`byte_to_pins`, `pins_to_byte`, `reverse_pins`).
- `a2emu.mc6845`: the Motorola MC6845 CRT controller (`MC6845`), its decoded
  registers (`ImageData`) and a raster walk (`ImageData.iterate_screen`) that
  yields one `RasterCell` per character cell row, cursor state included
  (`CursorMode`).
- `a2emu.upd1990`: the NEC µPD1990AC serial calendar clock (`MicroPD1990ac`).
- `a2emu.memory`: RAM and paged ROM ranges (`MemoryRange`, `MemoryRangeROM`),
  the Basis 108 memory with its static text RAM (`Basis108Memory`) and a
  wrapper that prints every access (`MemoryTracer`, `trace_memory`,
  `identify_memory`).
- `a2emu.io_page`: the `$C0xx` soft switch page (`IoC0Page`, `IoFlag`,
  `ss_from_bool`). Unknown switches read as zero, or raise `LookupError`
  when their block is marked with `set_panic_not_implemented` or
  `panic_not_implemented_slot`.
- `a2emu.no_slot_clock`: the DS1216 phantom clock that sits in front of a
  ROM (`NoSlotClockDS1216`, `encode_time`, `setup_no_slot_clock`).
- `a2emu.resources`: `load_resource` reads a local file, an http/https URL,
  or a `<internal>/` name from a directory you pass as `internal_dir`;
  gzip content is decompressed and, for zip content, the first entry accepted
  by an `is_diskette` test is returned. It reports whether the data may be
  written back (only plain local files). Also `normalize_filename`,
  `is_internal_resource`, `is_http_resource`.
- `a2emu.memory_manager`: the memory map of the II+ and IIe
  (`MemoryManager`): main and auxiliary RAM, language card and Saturn banks,
  RAMWorks banks, slot ROMs and the `$C800` area, 80STORE paging and ROM
  inhibition.
- `a2emu.keyboard`: a queue-backed keyboard (`KeyboardChannel`) that accepts
  text, maps common macOS option-key characters to plain ASCII and can force
  capitals through a callable.
- `a2emu.z80_softcard`: the Z80 SoftCard address translation
  (`z80_address_translation`), the slot ROM that calls back on writes
  (`RomWriteTrap`) and the Z80 view of memory (`Z80Memory`).
- `a2emu.videoterm` and `a2emu.ultraterm`: the Videx Videoterm and UltraTerm
  80 column cards (`VidexVideoterm`, `VidexUltraterm`), rendering their
  screens to Pillow images (`build_image`) and to text (`get_text`).
- `a2emu.fujinet`: the FujiNet JSON query engine (`FnJson`, `get_json_value`)
  and network protocols (`Protocol`, `HttpProtocol` for GET only,
  `instantiate_protocol`); failures raise `ProtocolError` carrying an
  `ErrorCode`.
- `a2emu.character_generator`: character ROMs with several code pages
  (`CharacterGenerator`, `setup_character_generator` for the `2plus`, `2e`
  and `basis108` boards).
- `a2emu.romx`: the RomX bank switcher (`RomX`); only the text bank switch
  has an effect.
- `a2emu.configuration`: machine models in `key: value` files that can name a
  `parent`, merged with command line overrides (`Configuration`,
  `ConfigurationModels`, `parse_configuration`, `load_configuration_models`,
  `merge_configs`, `build_argument_parser`,
  `configuration_from_command_line`).

## Examples

Bytes and pins:

```python
from a2emu.pins import byte_to_pins, pins_to_byte, reverse_pins

value = 0b10010110
pins = byte_to_pins(value)          # pin 0 is the least significant bit
assert pins_to_byte(pins) == value
assert reverse_pins(0b00000001) == 0b10000000
```

Programming the CRT controller:

```python
from a2emu.mc6845 import MC6845

crtc = MC6845()
crtc.write(False, 1)       # select register R1
crtc.write(True, 80)       # 80 displayed columns
crtc.write(False, 6)       # select register R6
crtc.write(True, 24)       # 24 displayed rows
crtc.write(False, 9)       # select register R9
crtc.write(True, 8)        # 9 scan lines per character

data = crtc.image_data()
width, height = data.displayed_width_height(8)   # (640, 216)
cells = list(data.iterate_screen())
```

Querying a JSON document:

```python
from a2emu.fujinet import FnJson

js = FnJson()
js.parse(b'{"position": {"latitude": "21.3276"}}')
assert js.query(b"/position/latitude") == b"21.3276"
assert js.query(b"/missing") == b"NULL"
```

Machine models are text files, one `key: value` per line, `#` for comments.
`load_configuration_models` reads every `*.cfg` in a directory and returns
the models together with the default model, `2enh`, which must be among
them:

```python
from a2emu.configuration import load_configuration_models

models, default = load_configuration_models("configs")
print(models.available_models())   # names not starting with "_"
```

## What this package does not do

There is no 6502 or Z80 processor, no machine that ties the pieces together
and runs them, no disk drives or disk image formats, no sound, joystick or
mouse, and no window or screen output beyond the images the video cards
return. No ROM images or model files are bundled: ROMs, character maps and
`.cfg` files must be supplied by the caller. The package has no command to
run.

## Running the tests

Install the `test` extra and run `pytest`.