# bake_planet.py

"""
================================================================================
OFFLINE PLANET BAKER SCRIPT
================================================================================
This script is a command-line tool for generating a planet and writing its six
cube faces to disk ("baking"). For every face it saves a gradient-coloured PNG
preview (grayscale with --grayscale) and the raw heights as a .npy array,
plus a manifest.json that lists the settings and files of the run. Existing
files are overwritten.

Usage:
    python bake_planet.py --config path/to/your/config.json [--output DIR]
                          [--seed N] [--width N] [--continent-maps]
                          [--grayscale]

The config file holds the generator parameters under the
"planet_generation_parameters" key.
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import numpy as np
from PIL import Image
from tqdm import tqdm

from planet_generator.generator import PlanetGenerator
from planet_generator.errors import PlanetGeneratorError
from planet_generator import color_maps
from planet_generator import config as DEFAULTS


def save_face_image(color_array: np.ndarray, file_path: str):
    """Saves a (height, width, 3) uint8 array as an RGB PNG with Pillow."""
    img = Image.fromarray(np.ascontiguousarray(color_array))
    img.save(file_path, 'PNG')


def load_planet_parameters(config_path: str) -> dict:
    with open(config_path, 'r') as f:
        config = json.load(f)
    return config.get('planet_generation_parameters', {})


# --- Main Baking Function ---
def bake_planet(config_path: str, output_dir: str = None, seed: int = None, width: int = None,
                continent_maps: bool = False, grayscale: bool = False) -> str:
    """
    Loads a configuration, generates the planet and saves every face to a
    structured output directory. Returns that directory, or None when the
    configuration could not be loaded or was rejected.
    """
    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")

    # 2. --- Load Configuration ---
    logger.info(f"Loading configuration from: {config_path}")
    try:
        planet_params = load_planet_parameters(config_path)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return None

    # Command-line values take precedence over the file.
    if seed is not None:
        planet_params['seed'] = seed
    if width is not None:
        planet_params['width'] = width

    # 3. --- Initialize the Planet Generator ---
    captured = {}

    def capture_continents(stage: str, payload: dict):
        if stage == "continents":
            captured['continent_ids'] = payload['continent_ids'].copy()
            captured['continent_count'] = len(payload['continents'])

    try:
        generator = PlanetGenerator(
            config=planet_params,
            logger=logger,
            diagnostic_hook=capture_continents if continent_maps else None,
        )
    except PlanetGeneratorError as e:
        logger.critical(f"Invalid planet configuration: {e}")
        return None

    # 4. --- Prepare Output Directory ---
    base_output_dir = os.path.join(output_dir or DEFAULTS.DEFAULT_OUTPUT_DIRECTORY, f"seed_{generator.seed}")
    os.makedirs(base_output_dir, exist_ok=True)

    # 5. --- Generate ---
    start_time = time.perf_counter()
    height_maps = generator.generate()

    # 6. --- Write Faces ---
    elevation_lut = None
    if not grayscale:
        logger.info("Pre-computing color lookup table...")
        elevation_lut = color_maps.create_elevation_lut()
    face_width = generator.width

    manifest = {
        'settings': generator.settings,
        'width': face_width,
        'coloring': 'grayscale' if grayscale else 'elevation',
        'faces': {},
    }

    for height_map in tqdm(height_maps, desc="Baking Faces"):
        label = height_map.face.label
        grid = height_map.values.reshape(face_width, face_width)

        image_name = f"height_map_{label}.png"
        array_name = f"height_map_{label}.npy"
        if grayscale:
            colors = color_maps.get_grayscale_color_array(grid)
        else:
            colors = color_maps.get_elevation_color_array(grid, elevation_lut)
        save_face_image(colors, os.path.join(base_output_dir, image_name))
        np.save(os.path.join(base_output_dir, array_name), grid)

        face_entry = {
            'face': height_map.face.name,
            'image': image_name,
            'array': array_name,
            'min': float(grid.min()),
            'max': float(grid.max()),
        }

        if continent_maps:
            continent_name = f"continents_{label}.png"
            colors = color_maps.get_continent_color_array(
                captured['continent_ids'][height_map.face], captured['continent_count'], generator.seed
            )
            save_face_image(colors, os.path.join(base_output_dir, continent_name))
            face_entry['continents'] = continent_name

        manifest['faces'][label] = face_entry

    # --- Finalization ---
    manifest_path = os.path.join(base_output_dir, "manifest.json")
    with open(manifest_path, 'w') as f:
        json.dump(manifest, f, indent=2)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info(f"Baked planet and manifest.json saved to: {base_output_dir}")
    return base_output_dir


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Offline Planet Baker for the cube-sphere planet generator.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the planet to be baked."
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help=f"Output directory (default: {DEFAULTS.DEFAULT_OUTPUT_DIRECTORY})."
    )
    parser.add_argument("--seed", type=int, default=None, help="Overrides the seed from the config file.")
    parser.add_argument("--width", type=int, default=None, help="Overrides the face width from the config file.")
    parser.add_argument(
        "--continent-maps",
        action="store_true",
        help="Also write one PNG per face colored by continent."
    )
    parser.add_argument(
        "--grayscale",
        action="store_true",
        help="Write the height previews in grayscale instead of the elevation gradient."
    )
    args = parser.parse_args(argv)

    result = bake_planet(args.config, args.output, args.seed, args.width, args.continent_maps, args.grayscale)
    return 0 if result is not None else 1


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
