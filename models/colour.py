import re
from dataclasses import dataclass

HEX = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


@dataclass(frozen=True, slots=True)
class Colour:
    name: str
    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self):
        def clamp(v: int) -> int:
            return 0 if v < 0 else 255 if v > 255 else v

        object.__setattr__(self, "red", clamp(self.red))
        object.__setattr__(self, "green", clamp(self.green))
        object.__setattr__(self, "blue", clamp(self.blue))
        object.__setattr__(self, "alpha", clamp(self.alpha))
        object.__setattr__(self, "name", self.name.lower())

    @classmethod
    def parse(cls, value: "str | Colour") -> "Colour":
        """Parse '#rgb', '#rrggbb', '#rrggbbaa' or a known colour name."""
        if isinstance(value, Colour):
            return value
        text = value.strip()
        named = Colours.get(text)
        if named is not None:
            return named
        m = HEX.match(text)
        if not m:
            raise ValueError(f"Unrecognised colour: {value!r}")
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        a = int(digits[6:8], 16) if len(digits) == 8 else 255
        return cls("", r, g, b, a)

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        return self.red, self.green, self.blue, self.alpha

    @property
    def hex(self) -> str:
        # "#rrggbb" as colour inputs report it
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    @property
    def css(self) -> str:
        """Canonical fill string; alpha only appears when not opaque."""
        if self.alpha < 255:
            return f"{self.hex}{self.alpha:02x}"
        return self.hex

    def __str__(self) -> str:
        r, g, b, a = self.rgba
        return f"<Colour; {self.name or 'Unknown'}: {r}, {g}, {b}, {a}>"

    def __repr__(self) -> str:
        return self.__str__()


class Colours:
    white = Colour("white", 255, 255, 255)
    black = Colour("black", 0, 0, 0)
    red = Colour("red", 255, 0, 0)
    green = Colour("green", 0, 128, 0)
    lime = Colour("lime", 0, 255, 0)
    blue = Colour("blue", 0, 0, 255)
    cyan = Colour("cyan", 0, 255, 255)
    magenta = Colour("magenta", 255, 0, 255)
    yellow = Colour("yellow", 255, 255, 0)
    orange = Colour("orange", 255, 165, 0)
    gray = Colour("gray", 128, 128, 128)
    grey = gray

    @classmethod
    def get(cls, value: str) -> Colour | None:
        col = getattr(cls, value.lower(), None)
        return col if isinstance(col, Colour) else None


def normalise_colour(value: "str | Colour") -> str:
    """Return the canonical lowercase hex form used for fills."""
    return Colour.parse(value).css
