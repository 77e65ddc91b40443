"""
Prompt templates for placing products into property photos.

Image order in every request is fixed: image [0] is the property photo (or
the current result being edited), image [1] is the product reference or the
edit mask.
"""

from typing import Dict, List, Tuple


# =============================================================================
# LIGHTING
# =============================================================================

# (start_hour, end_hour_exclusive, description, prompt)
LIGHTING_BANDS: List[Tuple[int, int, str, str]] = [
    (
        7, 8, "sunrise",
        "NEW ZEALAND SUNRISE LIGHTING: Subtle, realistic sunrise light with gentle warm tones. "
        "The sun sits low on the horizon and casts moderate shadows; the sky shows soft oranges "
        "and pinks. Keep the light natural and understated, no oversaturation.",
    ),
    (
        8, 11, "morning",
        "NEW ZEALAND MORNING LIGHTING: Clear, natural morning sunlight at realistic intensity "
        "with well-defined but natural shadows and a blue sky. Fresh and natural, no oversaturation.",
    ),
    (
        11, 15, "midday",
        "NEW ZEALAND MIDDAY LIGHTING: Natural overhead midday sun with short shadows directly "
        "under objects. Blue sky, natural colours, realistic intensity.",
    ),
    (
        15, 18, "afternoon",
        "NEW ZEALAND AFTERNOON LIGHTING: Warm afternoon sunlight with moderately long shadows "
        "and gentle warm tones on surfaces. Subtle and realistic, no oversaturation.",
    ),
    (
        18, 19, "golden hour",
        "NEW ZEALAND GOLDEN HOUR: Natural golden-hour light with subtle warm tones, gentle "
        "side-lighting, longer shadows and soft reflections. Understated, no oversaturation.",
    ),
    (
        19, 21, "sunset",
        "NEW ZEALAND SUNSET LIGHTING: Realistic sunset with natural oranges, soft pinks and "
        "gentle purples in the sky. The setting sun casts warm tones and natural shadows.",
    ),
    (
        21, 23, "night",
        "NEW ZEALAND NIGHT LIGHTING: Naturally dark sky (deep blue or black, stars where "
        "appropriate) with no daylight. Add warm deck lights, landscape path lights and house "
        "lighting typical of New Zealand homes.",
    ),
]

DEFAULT_TIME_DESCRIPTION = "daylight"
DEFAULT_LIGHTING_PROMPT = (
    "NEW ZEALAND DAYLIGHT: Natural daylight with realistic intensity and natural colour "
    "temperature. Keep lighting effects subtle and natural."
)


# =============================================================================
# STYLES
# =============================================================================

STYLE_DESCRIPTIONS: Dict[str, str] = {
    "Realistic": "Focus on absolute photorealism. Natural lighting, accurate colours and realistic textures; the image should look like an unedited photograph.",
    "Cinematic": "Dramatic lighting and high contrast. Emphasise mood and atmosphere with rich colours and deep shadows.",
    "Golden Hour": "Simulate the warm, soft light of sunrise or sunset. Long shadows, golden hues, an inviting atmosphere.",
    "Modern": "Clean lines, cool tones and high-key lighting. Emphasise clarity, brightness and contemporary architecture.",
    "Rustic": "Warm, earthy tones with soft, diffused light. Emphasise natural materials and a cosy feel.",
    "Architectural": "Focus on structure and form. Balanced composition, vertical lines and neutral lighting, like a professional architectural visualisation.",
}


# =============================================================================
# PLACEMENT
# =============================================================================

PRESERVE_COMPOSITION = """TOP PRIORITY CONSTRAINT: PRESERVE THE ORIGINAL IMAGE COMPOSITION
NEVER change the camera angle, perspective, viewpoint or crop of the user's photograph [Image 0]. Only add the product and supporting site details while keeping the exact same camera position."""

TINY_HOME_PLACEMENT = """PRIMARY OBJECTIVE: Integrate the {name} tiny home into the property scene with full product accuracy.

Image [0]: The property scene.
Image [1]: Tiny home reference image. This is the exact architectural template.

ARCHITECTURAL PRECISION:
- Reproduce every window, door, roofline, siding pattern and trim detail from Image [1]
- NEVER add features, doors, porches or decks that are not in the reference
- NEVER change window sizes, shapes or counts
- The tiny home sits level on the natural ground plane, never tilted

SCALE:
Scale the tiny home to real-world proportions using visible references: doors (8 feet), fence panels (6 feet), windows (3x4 feet) and vehicles. Keep its {length}m x {width}m footprint."""

POOL_PLACEMENT = """PRIMARY OBJECTIVE: Integrate the {name} pool into the property scene with full shape fidelity.

Image [0]: The property scene.
Image [1]: Pool reference diagram. Match its exact shape, steps, ledges and corner style.

SHAPE AND SCALE:
- The pool is a {length}m x {width}m in-ground pool, {depth}m deep
- Keep the reference outline exactly; do not round sharp corners or add features
- Set the pool into level ground with realistic coping and surrounding paving
- Scale against visible references such as fences, doors and outdoor furniture"""

THINKING_STEP = """STEP 1: FORENSIC ANALYSIS
Before generating, study Image [1] and list every structural element, material, colour and proportion. Use that inventory as the specification for the render."""

PLACEMENT_HINTS: Dict[str, str] = {
    "center": "Place the product in the centre of the usable open ground.",
    "left": "Place the product on the left side of the scene.",
    "right": "Place the product on the right side of the scene.",
}

PERSON_SCALE_TEMPLATE = (
    "CRITICAL: Use the person in the photo ({height_cm}cm tall) as the scale reference. "
    "The product should measure {ratio:.1f} times the person's height. "
    "REMOVE the person from the final image."
)

LIGHTING_PRESERVATION = """LIGHTING PRESERVATION MODE: Keep the exact lighting of Image [0]. Shadow direction, length and softness, colour temperature and atmosphere stay identical, and the product is lit as if photographed at the same moment."""

LIGHTING_MATCH = """Lighting & Environmental Integration:
Match the existing light: shadow direction, length, softness and colour temperature from the property photo are replicated on the product."""

SITE_INTEGRATION = """SITE INTEGRATION:
Make the product look established: foundation planting, gravel or paving transitions, a path connecting to the existing yard, and outdoor lighting where appropriate."""

ULTRA_ACCURACY = """ULTRA ACCURACY MODE: Render at maximum detail and verify every architectural feature against the reference before finishing."""

VERIFICATION_CHECKLIST = """FINAL VERIFICATION CHECKLIST:
1. Does the product match Image [1] exactly? (Must be YES)
2. Are all features identical to the reference? (Must be YES)
3. Do proportions and scale match real-world references? (Must be YES)
4. Does it sit level on the ground plane? (Must be YES)
If any answer is NO the generation has failed and must be corrected."""

FINAL_VERIFICATION = """FINAL VERIFICATION: The product matches Image [1], its scale is right for the visible references, it sits level, its shadows follow the scene's light direction, and the result meets professional real estate photography standards."""


# =============================================================================
# EDITS
# =============================================================================

REPOSITION_TEMPLATE = "Reposition the {name} {kind} in this scene by making the following adjustments: "

REPOSITION_SUFFIX = (
    "while maintaining realistic proportions and scale. Preserve the property scene exactly "
    "as shown, changing only the position of the structure."
)

LIGHTING_ONLY_COMMAND = (
    "Modify this image by adjusting only the lighting and atmospheric conditions according to "
    "these specifications: {lighting}. Preserve the {kind} and all other elements in their exact "
    "current positions, keeping the same composition and spatial relationships."
)

LIGHTING_EDIT = (
    "Adjust the lighting in this photograph to match these conditions: {lighting}. Keep all "
    "structures, positions and composition exactly the same. Only change the light quality, "
    "shadow direction and softness, and overall atmosphere, as if the same scene were "
    "photographed at a different time of day."
)

CONVERSATIONAL_EDIT = """TOP PRIORITY: PRESERVE ORIGINAL IMAGE COMPOSITION
Keep the EXACT same camera angle, perspective, viewpoint and composition as the current image.

Make this specific change to the photograph: {instruction}. Keep everything else exactly as it appears: same composition, positions and lighting. Do NOT move, resize, rotate or alter existing structures (pools, tiny homes, buildings). Only add or modify what was requested. The result should look like a real photograph with the change naturally integrated."""

DEFAULT_MASKED_INSTRUCTION = (
    "Remove the masked object and fill in the background naturally to match the surrounding scene."
)

MASKED_EDIT = """Image [0] is the photograph to edit. Image [1] is a black and white mask of the same size.
Edit ONLY the area that is WHITE in the mask; every BLACK pixel must stay exactly as it is in Image [0].

Instruction for the white area: {instruction}

Blend the edited area seamlessly with its surroundings, matching lighting, perspective and texture."""

REGION_EDIT = """Focus on the region of interest given as [top, left, bottom, right] = {region} on a 0-1000 scale of the current image.
{instruction}
Keep the output framed at the same aspect ratio as the current image and keep everything outside the region consistent with it."""

DEFAULT_REGION_INSTRUCTION = (
    "Crop and zoom to this region, rendering it at full resolution with sharp, realistic detail."
)
