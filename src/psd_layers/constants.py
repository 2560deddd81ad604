"""
Various constants for psd_layers
"""

from enum import Enum, IntEnum

#: File header signature.
PSD_SIGNATURE = b"8BPS"

#: Signature that precedes the blend mode key of a layer record.
BLEND_SIGNATURE = b"8BIM"

#: Signatures accepted at the head of an additional layer info block.
TAGGED_BLOCK_SIGNATURES = (b"8BIM", b"8B64")

#: Only version 1 (PSD) documents are decoded. Version 2 is PSB.
SUPPORTED_VERSION = 1


class ColorMode(IntEnum):
    """
    Color mode.
    """

    BITMAP = 0
    GRAYSCALE = 1
    INDEXED = 2
    RGB = 3
    CMYK = 4
    MULTICHANNEL = 7
    DUOTONE = 8
    LAB = 9


class ChannelID(IntEnum):
    """
    Channel types.
    """

    CHANNEL_0 = 0  # Red, Cyan, Gray, ...
    CHANNEL_1 = 1  # Green, Magenta, ...
    CHANNEL_2 = 2  # Blue, Yellow, ...
    CHANNEL_3 = 3  # Black, ...
    TRANSPARENCY_MASK = -1
    USER_LAYER_MASK = -2
    REAL_USER_LAYER_MASK = -3


class Clipping(IntEnum):
    """Clipping."""

    BASE = 0
    NON_BASE = 1


class BlendMode(Enum):
    """
    Blend modes.
    """

    PASS_THROUGH = b"pass"
    NORMAL = b"norm"
    DISSOLVE = b"diss"
    DARKEN = b"dark"
    MULTIPLY = b"mul "
    COLOR_BURN = b"idiv"
    LINEAR_BURN = b"lbrn"
    DARKER_COLOR = b"dkCl"
    LIGHTEN = b"lite"
    SCREEN = b"scrn"
    COLOR_DODGE = b"div "
    LINEAR_DODGE = b"lddg"
    LIGHTER_COLOR = b"lgCl"
    OVERLAY = b"over"
    SOFT_LIGHT = b"sLit"
    HARD_LIGHT = b"hLit"
    VIVID_LIGHT = b"vLit"
    LINEAR_LIGHT = b"lLit"
    PIN_LIGHT = b"pLit"
    HARD_MIX = b"hMix"
    DIFFERENCE = b"diff"
    EXCLUSION = b"smud"
    SUBTRACT = b"fsub"
    DIVIDE = b"fdiv"
    HUE = b"hue "
    SATURATION = b"sat "
    COLOR = b"colr"
    LUMINOSITY = b"lum "


class GlobalLayerMaskKind(IntEnum):
    """Global layer mask kind."""

    COLOR_SELECTED = 0
    COLOR_PROTECTED = 1
    PER_LAYER = 128


class Compression(IntEnum):
    """
    Compression modes.

    Compression. 0 = Raw Data, 1 = RLE compressed, 2 = ZIP without prediction,
    3 = ZIP with prediction. Only the first two are decoded.
    """

    RAW = 0
    RLE = 1
    ZIP = 2
    ZIP_WITH_PREDICTION = 3


class Tag(Enum):
    """
    Keys of additional layer info blocks.

    Only the keys are known here, the payloads are skipped.
    """

    ANNOTATIONS = b"Anno"
    ARTBOARD_DATA1 = b"artb"
    BLEND_CLIPPING_ELEMENTS = b"clbl"
    BLEND_FILL_OPACITY = b"iOpa"  # Undocumented.
    BLEND_INTERIOR_ELEMENTS = b"infx"
    CHANNEL_BLENDING_RESTRICTIONS_SETTING = b"brst"
    CONTENT_GENERATOR_EXTRA_DATA = b"CgEd"
    EFFECTS_LAYER = b"lrFX"
    FILTER_EFFECTS1 = b"FXid"
    FILTER_MASK = b"FMsk"
    FOREIGN_EFFECT_ID = b"ffxi"
    KNOCKOUT_SETTING = b"knko"
    LAYER = b"Layr"
    LAYER_16 = b"Lr16"
    LAYER_32 = b"Lr32"
    LAYER_ID = b"lyid"
    LAYER_MASK_AS_GLOBAL_MASK = b"lmgm"
    LAYER_NAME_SOURCE_SETTING = b"lnsr"
    LAYER_VERSION = b"lyvr"
    LINKED_LAYER1 = b"lnkD"
    LINKED_LAYER_EXTERNAL = b"lnkE"
    METADATA_SETTING = b"shmd"
    NESTED_SECTION_DIVIDER_SETTING = b"lsdk"
    OBJECT_BASED_EFFECTS_LAYER_INFO = b"lfx2"
    PATTERNS1 = b"Patt"
    PIXEL_SOURCE_DATA1 = b"PxSc"
    PLACED_LAYER1 = b"plLd"
    PROTECTED_SETTING = b"lspf"
    REFERENCE_POINT = b"fxrp"
    SAVING_MERGED_TRANSPARENCY = b"Mtrn"
    SECTION_DIVIDER_SETTING = b"lsct"
    SHEET_COLOR_SETTING = b"lclr"
    SMART_OBJECT_LAYER_DATA1 = b"SoLd"
    TEXT_ENGINE_DATA = b"Txt2"
    TRANSPARENCY_SHAPES_LAYER = b"tsly"
    TYPE_TOOL_OBJECT_SETTING = b"TySh"
    UNICODE_LAYER_NAME = b"luni"
    UNICODE_PATH_NAME = b"pths"
    USING_ALIGNED_RENDERING = b"sn2P"
    VECTOR_MASK_AS_GLOBAL_MASK = b"vmgm"
    VECTOR_MASK_SETTING1 = b"vmsk"
    VECTOR_ORIGINATION_DATA = b"vogk"
