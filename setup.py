from setuptools import setup

__version__ = '0.1-dev'

setup(
    name="rgm-vic-overlay",
    description="Builds Regional Glacier Model input files by overlaying "
                "DEM pixels on the VIC computational grid",
    keywords="science climate hydrology glacier modelling gis",
    packages=['overlay'],
    version=__version__,
    url="http://www.pacificclimate.org/",
    author="Michael Fischer",
    author_email="mfischer@uvic.ca",
    python_requires='>=3.8',
    install_requires = ['numpy', 'pandas>=1.5', 'geopandas>=0.14',
                        'shapely>=2.0', 'pyproj', 'rasterio', 'matplotlib'],
    extras_require = {'test': ['pytest', 'mock']},
    scripts = ['scripts/rgm_vic_overlay.py'],
    zip_safe=True,
        classifiers=[
            'Environment :: Console',
            'Natural Language :: English',
            'Intended Audience :: Developers',
            'Intended Audience :: Science/Research',
            'License :: OSI Approved :: GNU General Public License (GPLv3)',
            'Operating System :: OS Independent',
            'Programming Language :: Python',
            'Programming Language :: Python :: 3',
            'Topic :: Scientific/Engineering :: GIS',
            'Topic :: Scientific/Engineering :: Hydrology',
            'Topic :: Software Development :: Libraries :: Python Modules'
        ]
)
