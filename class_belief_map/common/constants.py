"""
Class belief map constants.

All magic numbers of the voxel word format and the map containers are
centralized here. The word-format constants must be identical on the writing
and the reading side: the serialized stream carries no header, so a mismatch
cannot be detected when decoding.

=============================================================================
VOXEL WORD LAYOUT QUICK REFERENCE (one voxel, 32-bit words)
=============================================================================
  word 0: number of classes in the voxel histogram
  word 1: belongs_count (bits 0-15) | foreign_count (bits 16-31)
  word 2: is_gt (bits 0-15)         | current_index (bits 16-31)
  -- only when word 0 != 0 --
  ceil(K / 4) words: top-K class indices, 8 bits each, entry 0 in the low byte
  ceil(K / (32 / V)) words: top-K counts, V bits each
  -- uncertainty voxels, only when the voxel is initialized --
  1 word: uncertainty_value as float32 bit pattern
=============================================================================
"""

# =============================================================================
# Word Format Constants
# =============================================================================

# Width of one stream word
WORD_BITS = 32

# Number of histogram entries kept per voxel (K)
SERIALIZE_TOP_N_COUNTS = 3

# Bits per serialized histogram count (V); must divide WORD_BITS
COUNTER_SIZE_BITS = 16

# Supported choices for COUNTER_SIZE_BITS
SUPPORTED_COUNTER_SIZE_BITS = (8, 16)

# Bits per serialized class index
INDEX_BITS = 8

# Histogram size limit; encoding a voxel with more classes fails
MAX_CLASSES_PER_VOXEL = 257

# Largest class index that fits an index slot
MAX_SERIALIZED_CLASS_INDEX = (1 << INDEX_BITS) - 1

# belongs_count / foreign_count / current_index / is_gt field width
AGGREGATE_COUNTER_BITS = 16
AGGREGATE_COUNTER_MAX = (1 << AGGREGATE_COUNTER_BITS) - 1
LOW_HALF_MASK = 0x0000FFFF
HIGH_HALF_MASK = 0xFFFF0000

# Fixed header words per voxel (class count, counters, index/gt)
VOXEL_HEADER_WORDS = 3

# Extra words appended by uncertainty voxels when initialized
UNCERTAINTY_WORDS = 1

# =============================================================================
# Voxel Constants
# =============================================================================

# Sentinel for voxels without a class assignment
UNASSIGNED_CLASS_INDEX = -1

# Voxel type tags (used to select codec/merge behaviour and in saved files)
VOXEL_TYPE_CLASS = "class"
VOXEL_TYPE_CLASS_UNCERTAINTY = "class_uncertainty"

# =============================================================================
# Map Constants
# =============================================================================

# Default voxel edge length (meters)
VOXEL_SIZE_DEFAULT = 0.05

# Default voxels per block edge (block holds VOXELS_PER_SIDE**3 voxels)
VOXELS_PER_SIDE_DEFAULT = 16

# First id handed out by a fresh submap collection
SUBMAP_ID_START = 0

# Probability convention for voxels without belongs/foreign observations
EMPTY_BELONGING_PROBABILITY = 0.0
