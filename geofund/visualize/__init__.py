from geofund.visualize import common, layers, spatial
from geofund.visualize.layers import RasterLayer, Style, VectorLayer
from geofund.visualize.spatial import Renderer, RendererState, render, save
